"""Output layer: Rich and JSON rendering of ServiceResult."""
