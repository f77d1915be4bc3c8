"""Voice/text crypto assistant: query routing and multi-provider token views."""
