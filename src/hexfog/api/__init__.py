"""HTTP adapter exposing the visibility pipeline to renderer and input clients."""
