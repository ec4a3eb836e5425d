"""Domain types: messages, capabilities, model catalog and provider ports."""
