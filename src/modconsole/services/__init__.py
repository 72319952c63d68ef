"""Services that fetch snapshots from the collaborators and run the engines."""
