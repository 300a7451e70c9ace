"""HTTP side of the client: routes, transport, wire schemas and bindings."""
