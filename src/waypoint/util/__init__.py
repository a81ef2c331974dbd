"""String helpers shared by the normalizer, matcher, and route builder."""
