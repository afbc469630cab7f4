"""Thread safe: render 1000 docs in parallel."""

from concurrent.futures import ThreadPoolExecutor

from mdpreview import render

docs = ["# Doc " + str(i) + "\n\n```python\nprint(" + str(i) + ")\n```" for i in range(1000)]

with ThreadPoolExecutor(max_workers=8) as ex:
    results = list(ex.map(render, docs))

print(f"Rendered {len(results)} documents in parallel")
print("First doc:", results[0])
