"""Keystroke-driven preview: a slow render of old text never wins."""

from concurrent.futures import ThreadPoolExecutor

from mdpreview import render
from mdpreview.preview import PreviewSession

session = PreviewSession()
print("Initial revision:", session.current.revision)
print(session.current.html[:80], "...")

# Each keystroke submits the full text; renders run on a pool and may finish out of order
text = ""
with ThreadPoolExecutor(max_workers=4) as pool:
    futures = []
    for char in "# Typing *fast*":
        text += char
        revision = session.edit(text)
        futures.append((revision, pool.submit(render, text)))
    for revision, future in reversed(futures):
        accepted = session.publish(revision, future.result())
        print(f"revision {revision:2d} accepted={accepted}")

print()
print("On display:", session.current)
