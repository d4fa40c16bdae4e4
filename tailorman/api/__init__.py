"""
Tailorman REST API.

Provides DRF endpoints for:
- Scan (apply a scan to a unit)
- Unit (read-only + history)
- Order (list/create + process)
- ProductionRequest (read-only + accept/modify)
- Bin (read-only + wash bin scan-out)
"""
