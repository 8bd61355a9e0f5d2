"""Pure business rules: normalization, classification and export layouts."""
