"""Actions package - Output of analysis results."""
