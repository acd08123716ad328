"""Rule checkers. Each takes a workbook and returns a CheckOutcome."""
