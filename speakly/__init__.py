"""SpeaklyAI - vocabulary practice with AI level placement."""

__version__ = "0.1"
