"""Seed development data: a short doctor/patient exchange."""
from __future__ import annotations

import asyncio
import logging

from care_messaging.config import settings
from care_messaging.domain.value_objects.enums import UserRole
from care_messaging.infrastructure.db.session import AsyncSessionLocal, create_schema
from care_messaging.infrastructure.db.uow import SqlAlchemyUoW
from care_messaging.log_config import configure_logging
from care_messaging.services import message_service, read_state_service

logger = logging.getLogger(__name__)

DOCTOR_ID = "user_dev_doctor"
PATIENT_ID = "user_dev_patient"


async def seed() -> None:
    await create_schema()

    exchange = [
        (PATIENT_ID, DOCTOR_ID, UserRole.PATIENT, "Hi doctor, my blood pressure readings are high this week."),
        (DOCTOR_ID, PATIENT_ID, UserRole.DOCTOR, "Thanks for flagging. Can you share the last three readings?"),
        (PATIENT_ID, DOCTOR_ID, UserRole.PATIENT, "145/95, 150/92 and 142/90."),
        (DOCTOR_ID, PATIENT_ID, UserRole.DOCTOR, "Let's review them at tomorrow's appointment."),
    ]

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        for sender_id, receiver_id, role, content in exchange:
            await message_service.send_message(
                sender_id, receiver_id, content, uow, sender_role=role,
            )
        # The doctor has opened the thread; the patient has not yet.
        await read_state_service.mark_read(PATIENT_ID, DOCTOR_ID, uow)

    logger.info("Seeded %d messages between %s and %s", len(exchange), DOCTOR_ID, PATIENT_ID)


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
