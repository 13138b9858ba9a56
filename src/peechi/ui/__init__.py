"""
Discord-facing presentation: embeds, button rows and modals.
"""
