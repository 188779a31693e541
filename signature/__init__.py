"""
Signature module.

Maps an on-screen text annotation onto page 0 of a PDF and burns it into
the page content (overlay merge with a standard PDF font).
"""
