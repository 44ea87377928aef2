"""
Vibe Check — live vibe voting with a one-switch censorship demo.
"""
