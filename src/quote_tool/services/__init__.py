"""Services subpackage - contact submission and formatting."""
