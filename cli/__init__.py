"""
MiniKV Command Shell
====================
Session (command execution over one store), Renderer, and interactive REPL.
"""
