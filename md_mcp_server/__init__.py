"""
MD MCP server package.

This package exposes MCP tools for:
- Medication reconciliation (BPMH, discrepancy detection and resolution)
- Therapeutic drug monitoring
- Drug interaction screening and management
- SOAP documentation
- Five-rights medication administration checks
- Cross-protocol decision support and audit reporting

It also serves static reference resources (lab ranges, vital-sign norms,
clinical decision rules) and workflow prompts over stdio or HTTP.
"""
