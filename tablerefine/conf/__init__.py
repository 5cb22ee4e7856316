"""Settings modules shipped with django-tablerefine."""
