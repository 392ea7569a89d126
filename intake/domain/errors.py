"""Domain errors that are allowed to reach the caller of a use case."""


class UnknownCategoryError(LookupError):
    def __init__(self, category_id: int):
        super().__init__(f"Ticket category {category_id} not found")
        self.category_id = category_id


class NotSpecializedError(ValueError):
    """The counselor holds no available specialization for the category."""

    def __init__(self, counselor_id: int, category_id: int):
        super().__init__(
            f"Counselor {counselor_id} does not specialize in category {category_id}"
        )
        self.counselor_id = counselor_id
        self.category_id = category_id


class CapacityExceededError(RuntimeError):
    def __init__(self, specialization_id: int):
        super().__init__(f"Specialization {specialization_id} is at capacity")
        self.specialization_id = specialization_id
