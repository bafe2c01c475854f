"""Interactive terminal viewer: explorer, preview and the full-screen application."""
