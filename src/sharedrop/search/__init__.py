"""Text search inside shared files."""
