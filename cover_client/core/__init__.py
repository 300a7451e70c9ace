"""Analysis lifecycle, result handling and test writing."""
