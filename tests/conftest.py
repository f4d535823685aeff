import os

# Renderer tests draw on off-screen surfaces only
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
