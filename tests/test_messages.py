"""Ephemeral messages: latest wins, auto-dismiss."""

import asyncio

import pytest

from safal_auth.messages import EphemeralMessage


def test_without_loop_message_stays():
    message = EphemeralMessage()
    assert not message
    message.show("Saved")
    assert message.text == "Saved"
    message.show("Saved again")
    assert message.text == "Saved again"
    message.clear()
    assert message.text is None


@pytest.mark.asyncio
async def test_auto_dismiss():
    message = EphemeralMessage(dismiss_after=0.01)
    message.show("Code sent")
    assert message
    await asyncio.sleep(0.05)
    assert message.text is None


@pytest.mark.asyncio
async def test_new_message_restarts_timer():
    message = EphemeralMessage(dismiss_after=0.05)
    message.show("first")
    await asyncio.sleep(0.03)
    message.show("second")
    await asyncio.sleep(0.03)
    assert message.text == "second"
    await asyncio.sleep(0.05)
    assert message.text is None


@pytest.mark.asyncio
async def test_clear_cancels_timer():
    message = EphemeralMessage(dismiss_after=0.01)
    message.show("gone")
    message.clear()
    message._text = "set directly"
    await asyncio.sleep(0.03)
    assert message.text == "set directly"
