"""Site backend: blog, notes, file uploads and the vice bank token economy."""
