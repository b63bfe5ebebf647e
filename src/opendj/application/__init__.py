"""
Application Layer

Contains the command dispatcher, the application services and the port
interfaces. This layer orchestrates domain objects and the adapters behind
the ports.

Structure:
- commands/: chat command parsing and dispatch
- services/: scheduler, voting, notification and playlist export services
- interfaces/: Port interfaces for infrastructure adapters
"""
