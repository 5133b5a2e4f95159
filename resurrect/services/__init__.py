"""Request orchestration and its collaborators."""
