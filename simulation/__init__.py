"""simulation — Runs the repair bots against a world.

This package owns the per-actor bot state and the tick loop that drives
the bot core at a fixed cadence.  Nothing in here decides *what* a bot
does; that lives in ``logic``.

Submodules
----------
registry        BotRegistry — one BotState per actor id
scheduler       CycleScheduler — named jobs on a tick cadence
bot_sim         BotSim — wires world, registry, scheduler and event bus
"""
