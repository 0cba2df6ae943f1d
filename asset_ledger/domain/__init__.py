"""Pure domain layer: asset records, the record codec, and the clock."""
