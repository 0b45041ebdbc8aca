"""
API Gateway Service package for the Helpdesk Access Gateway.

The gateway fronts client requests for three backends (Clients, Tickets,
Products), enforcing:
- Authentication: locally signed bearer tokens
- Forwarding: a closed, declarative route table
- Auditing: fire-and-forget events to Kafka

Structure:
- app.main: FastAPI app, routes, and lifecycle wiring.
- app.adapters: HTTP client for the backend services.
- app.auth: Token issue and verification.
- app.domain: Auth gate and generic forwarder.
- app.events: Background event publisher.
- app.routing: The route table and event payload builders.
"""
