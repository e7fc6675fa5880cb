"""Host adapters that embed the trainer engine in a user interface."""
