"""Task models, prompt builders and the dispatcher.

Submodules are imported directly (`rephrase_ai.tasks.dispatcher`, ...); the
usage counter depends on `tasks.models`, so this package stays import-free.
"""
