"""
Main orchestrator for the release notes digest.
"""

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from gcp_release_digest.communicator import (
    ChatWebhookCommunicator,
    ICommunicator,
    get_webhook_rate_limiter,
    is_success_status,
)
from gcp_release_digest.observability.logger import (
    bind_correlation_id,
    get_logger,
    new_correlation_id,
)
from gcp_release_digest.release_notes import (
    BigQueryReleaseNoteSource,
    IReleaseNoteSource,
    Product,
    ReleaseNoteQuery,
    ReleaseNoteType,
)
from gcp_release_digest.summarizer import (
    ISummarizer,
    SummarizationRequest,
    SummarizerFactory,
)

from .models import (
    Channel,
    ChannelPlan,
    ChannelResult,
    DigestConfig,
    DigestResult,
    ProductResult,
    StepStatus,
)


def _submit(executor: ThreadPoolExecutor, fn, *args):
    # a fresh context per task carries the run correlation id into the worker
    return executor.submit(contextvars.copy_context().run, fn, *args)


class ReleaseDigestAgent:
    """
    Fetches, summarizes and posts release notes for every configured channel.

    Category channels run concurrently, then the general channel picks up
    the unassigned categories. Within a channel the products run
    concurrently. A failing product or channel is recorded in the result
    and never stops the rest of the run.
    """

    def __init__(
        self,
        config: DigestConfig,
        *,
        source: Optional[IReleaseNoteSource] = None,
        summarizer: Optional[ISummarizer] = None,
        communicator: Optional[ICommunicator] = None,
    ):
        self.config = config
        self.plan = ChannelPlan.from_config(config)
        self.logger = get_logger("gcp_release_digest.agent.orchestrator")

        self.source = source or BigQueryReleaseNoteSource(
            config.project_id,
            table=config.release_notes_table,
            location=config.bigquery_location,
        )
        self.summarizer = summarizer or SummarizerFactory.create_summarizer(
            project_id=config.project_id,
            location=config.model_location,
            model_name=config.model,
        )
        self.communicator = communicator or ChatWebhookCommunicator(
            rate_limiter=get_webhook_rate_limiter(config.webhook_rate_limit),
            timeout=config.webhook_timeout,
        )

    def run(self) -> DigestResult:
        """Run the digest for every channel and wait for all of them."""
        start_time = time.time()
        run_id = new_correlation_id()

        with bind_correlation_id(run_id):
            self.logger.info(
                f"Starting digest for the last {self.config.cadence_days} days "
                f"(channels: {', '.join(c.release_note_type for c in self.plan.channels)})"
            )
            if self.plan.general:
                self.logger.info(
                    f"Release note types for the general channel: {', '.join(self.plan.unassigned_types) or '-'}"
                )

            channel_results: List[ChannelResult] = []

            if self.plan.specific:
                with ThreadPoolExecutor(
                    max_workers=len(self.plan.specific),
                    thread_name_prefix="digest-channel",
                ) as executor:
                    futures = [_submit(executor, self.process_channel, c) for c in self.plan.specific]
                    channel_results.extend(f.result() for f in futures)

            if self.plan.general:
                channel_results.append(self.process_channel(self.plan.general))

            success = all(c.status != StepStatus.FAILED for c in channel_results)
            result = DigestResult(
                success=success,
                run_id=run_id,
                cadence_days=self.config.cadence_days,
                channels=channel_results,
                total_duration=time.time() - start_time,
            )
            if not success:
                result.error_message = "; ".join(
                    f"{c.release_note_type}: {c.error or f'{len(c.failed_products)} product(s) failed'}"
                    for c in channel_results
                    if c.status == StepStatus.FAILED
                )
                self.logger.error(f"Digest finished with failures: {result.error_message}")
            else:
                self.logger.info(f"Digest completed successfully in {result.total_duration:.2f}s")
            return result

    def process_channel(self, channel: Channel) -> ChannelResult:
        """Announce, summarize every product, then close the channel."""
        result = ChannelResult(release_note_type=channel.release_note_type, status=StepStatus.RUNNING)
        query = self.plan.query_for(channel, self.config.cadence_days)

        try:
            products = self.source.get_products(query)
        except Exception as e:
            result.status = StepStatus.FAILED
            result.error = f"Error querying for products: {e}"
            self.logger.error(f"[{channel.release_note_type}] {result.error}")
            return result

        result.products = [p.name for p in products]

        try:
            result.announce_status = self.communicator.announce(
                channel.webhook_url, self.config.cadence_days, products
            )
        except Exception as e:
            # the channel's webhook is unreachable; nothing else would get through
            result.status = StepStatus.FAILED
            result.error = f"Error announcing products: {e}"
            self.logger.error(f"[{channel.release_note_type}] {result.error}")
            return result

        errors: List[str] = []
        if not is_success_status(result.announce_status):
            if products:
                errors.append(f"announcement answered {result.announce_status}")
            else:
                # chat webhooks reject an empty text; nothing was lost
                self.logger.info(
                    f"[{channel.release_note_type}] Empty announcement answered {result.announce_status}"
                )

        if products:
            with ThreadPoolExecutor(
                max_workers=min(self.config.max_workers, len(products)),
                thread_name_prefix="digest-product",
            ) as executor:
                futures = [_submit(executor, self.process_product, channel, query, p) for p in products]
                result.product_results = [f.result() for f in futures]

            try:
                result.closing_status = self.communicator.send_closing_message(
                    channel.webhook_url, self.config.closing_message
                )
                if not is_success_status(result.closing_status):
                    errors.append(f"closing message answered {result.closing_status}")
            except Exception as e:
                errors.append(f"Error sending closing message: {e}")
                self.logger.error(f"[{channel.release_note_type}] Error sending closing message: {e}")

        if errors:
            result.error = "; ".join(errors)
        result.status = StepStatus.FAILED if errors or result.failed_products else StepStatus.COMPLETED
        self.logger.info(
            f"[{channel.release_note_type}] {len(products)} product(s), "
            f"{len(result.failed_products)} failed, status: {result.status.value}"
        )
        return result

    def process_product(self, channel: Channel, query: ReleaseNoteQuery, product: Product) -> ProductResult:
        """Fetch one product's notes, summarize them and post the summary."""
        result = ProductResult(product=product.name, status=StepStatus.RUNNING, started_at=time.time())

        try:
            notes = self.source.get_release_notes(product.name, query)
            result.release_note_count = len(notes)
            if not notes:
                result.status = StepStatus.SKIPPED
                self.logger.warning(f"[{channel.release_note_type}] No release notes left for {product.name}")
                return result

            summary = self.summarizer.summarize(SummarizationRequest(product=product.name, release_notes=notes))
            if not summary.strip():
                result.status = StepStatus.FAILED
                result.error = "Model returned no text"
                self.logger.warning(f"[{channel.release_note_type}] Empty summary for {product.name}; not posted")
                return result

            result.delivery_status = self.communicator.send_summary(product.name, summary, channel.webhook_url)

            if is_success_status(result.delivery_status):
                result.status = StepStatus.COMPLETED
            else:
                result.status = StepStatus.FAILED
                result.error = f"Webhook answered {result.delivery_status}"

        except Exception as e:
            result.status = StepStatus.FAILED
            result.error = str(e)
            self.logger.error(f"[{channel.release_note_type}] Processing {product.name} failed: {e}")

        finally:
            result.completed_at = time.time()

        return result

    def list_products(self, release_note_type: Optional[str] = None) -> List[str]:
        """Products of one release note type, or of the general channel's types."""
        if release_note_type:
            label = ReleaseNoteType(release_note_type.strip().upper()).value
            query = ReleaseNoteQuery.for_type(self.config.cadence_days, label)
        else:
            query = ReleaseNoteQuery.for_types(self.config.cadence_days, self.plan.unassigned_types)
        return [p.name for p in self.source.get_products(query)]

    def cleanup(self):
        """Release clients."""
        self.logger.info("Cleaning up resources...")
        for component in (self.source, self.summarizer, self.communicator):
            try:
                component.cleanup()
            except Exception as e:
                self.logger.warning(f"Error cleaning up {type(component).__name__}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
