class InventoryDecodeError(ValueError):
    """An inventory page or the profile context table could not be decoded."""


class InventoryNotFoundError(KeyError):
    def __init__(self, app_id, context_id):
        super().__init__((app_id, context_id))
        self.app_id = app_id
        self.context_id = context_id

    def __str__(self):
        return f"Inventory {self.app_id}/{self.context_id} was not fetched"
