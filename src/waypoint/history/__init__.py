"""The transition controller and its navigation backends."""
