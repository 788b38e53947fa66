"""Services Layer — the imperative shell around core: record store and mirroring."""
