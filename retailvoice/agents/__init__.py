"""
Agent implementations for RetailVoice.

Contains the modules that move sheet data through the pipeline:
- Tabular Response Parser
- Domain Record Mapper
- Ingestion Agent
- Versioned Poller
- Aggregation Engine
- Summarization Gateway
"""
