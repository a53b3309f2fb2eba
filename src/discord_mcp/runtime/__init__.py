"""Process lifecycle and wiring."""
