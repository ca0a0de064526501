"""Script IR: types, variable cells, expressions and statements."""
