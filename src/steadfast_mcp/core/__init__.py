"""Reliability engines for steadfast-mcp.

Sub-packages:
    insights      - classify remote failures into Insights
    verification  - confirm mutations and poll asynchronous jobs
    governance    - bound response size (raw, summarized, truncated)
    elicitation   - collect missing arguments from the client
"""
