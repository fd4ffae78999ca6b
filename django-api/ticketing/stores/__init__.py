from ticketing.stores.interfaces import Directory, InventoryLedger, TicketStore

__all__ = ["Directory", "InventoryLedger", "TicketStore"]
