"""Backend-facing services and view-model builders."""
