from receptionist.agents.receptionist_agent import ReceptionistAgent, SessionUserData

__all__ = ["ReceptionistAgent", "SessionUserData"]
