"""Business logic services; routes stay thin and delegate here."""
