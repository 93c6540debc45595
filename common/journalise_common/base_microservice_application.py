"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import abc
import asyncio
import logging
import typing


class BaseMicroserviceApplication(abc.ABC):
    """ Base class for a Quart hosted microservice with a background loop. """
    __slots__ = ["_is_initialised", "_logger", "_shutdown_complete",
                 "_shutdown_event"]

    def __init__(self):
        self._is_initialised: bool = False
        self._logger: typing.Optional[logging.Logger] = None
        self._shutdown_event: asyncio.Event = asyncio.Event()
        self._shutdown_complete: asyncio.Event = asyncio.Event()

    @property
    def logger(self) -> logging.Logger:
        """
        Property getter for logger instance.

        returns:
            Returns the logger instance.
        """
        return self._logger

    @logger.setter
    def logger(self, logger: logging.Logger) -> None:
        """
        Property setter for logger instance.

        parameters:
            logger (logging.Logger) : Logger instance.
        """
        self._logger = logger

    @property
    def is_initialised(self) -> bool:
        """ True once ``initialise`` has completed successfully. """
        return self._is_initialised

    @property
    def shutdown_event(self) -> asyncio.Event:
        """
        Event set when the service is asked to stop.

        Background tasks check it to leave their loops cleanly.
        """
        return self._shutdown_event

    @property
    def shutdown_complete(self) -> asyncio.Event:
        """
        Event set once ``_shutdown`` has finished and resources are released.
        """
        return self._shutdown_complete

    async def initialise(self) -> bool:
        """
        Microservice initialisation. On success ``is_initialised`` becomes
        True, on failure the service is stopped.

        Returns:
            Boolean: True => Successful, False => Unsuccessful.
        """
        if await self._initialise() is True:
            self._is_initialised = True
            return True

        await self.stop()

        return False

    async def run(self) -> None:
        """
        Run the background loop until the shutdown event is set.
        """

        if not self._is_initialised:
            self._logger.warning("Microservice is not initialised. "
                                 "Exiting run loop.")
            return

        self._logger.info("Microservice starting main loop.")

        try:
            while not self.shutdown_event.is_set():
                await self._main_loop()
                await asyncio.sleep(0.1)

        except asyncio.CancelledError:
            self._logger.debug("Service: Cancellation received.")
            raise

        finally:
            self._logger.info("Exiting microservice run loop...")
            await self.stop()
            self._logger.info("Shutdown complete.")

    async def stop(self) -> None:
        """
        Signal shutdown and run the service specific shutdown logic once.
        """
        if self._shutdown_complete.is_set():
            return

        self._logger.info("Stopping microservice...")

        self._shutdown_event.set()

        await self._shutdown()
        self._shutdown_complete.set()

        self._logger.info("Microservice shutdown complete...")

    async def _initialise(self) -> bool:
        """
        Service specific initialisation, returns True on success.
        """
        return True

    @abc.abstractmethod
    async def _main_loop(self) -> None:
        """ Abstract method for one iteration of the background loop. """

    @abc.abstractmethod
    async def _shutdown(self):
        """ Abstract method for microservice shutdown. """
