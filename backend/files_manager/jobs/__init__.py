"""Background jobs: queues, handlers and the worker pool that runs them."""
