"""Signal Ledger: stores trading-signal webhooks and serves them by ticker."""
