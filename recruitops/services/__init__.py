"""
Services module - business logic and external API clients.

- priority / company_names / silver_medalists: pure domain rules
- ats_client / llm_client: upstream HTTP clients
- *_service: persistence-backed operations used by the routes
"""
