"""Back office HTML pages."""
