"""Microsoft Graph transport, response models and content policies."""
