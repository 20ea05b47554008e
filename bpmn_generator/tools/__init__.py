"""Command-line tools for the BPMN generator."""
