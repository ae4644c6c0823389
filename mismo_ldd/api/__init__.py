"""HTTP boundary for the rules engine and schema pack validator."""
