"""Resolution services and the shared layer catalog."""
