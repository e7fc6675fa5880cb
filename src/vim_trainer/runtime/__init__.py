"""Runtime services (logging and timing) shared by the trainer."""
