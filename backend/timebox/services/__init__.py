"""Service layer: slot grid, plan aggregate, proposals and history."""
