"""
audioedit - sample-buffer editing and PCM WAV export.
"""
__version__ = "0.1.0"
