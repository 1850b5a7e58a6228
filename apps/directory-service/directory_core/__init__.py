"""Directory console state layer: commissions, districts, groups, bands and members."""
