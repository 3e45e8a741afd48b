"""Row sources over local spreadsheet exports."""
