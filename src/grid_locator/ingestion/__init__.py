"""Reading layer documents from files and URLs."""
