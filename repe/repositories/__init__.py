"""Repository layer: async functions taking an AsyncSession first.

Each module validates its input and raises StorageError with a typed code.
"""
