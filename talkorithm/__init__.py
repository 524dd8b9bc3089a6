"""Talkorithm — a voice- and sketch-enabled DSA mentor."""
