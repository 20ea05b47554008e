"""HTTP API for the BPMN generator."""
