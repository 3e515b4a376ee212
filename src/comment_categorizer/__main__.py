from comment_categorizer.cli import entrypoint

entrypoint()
