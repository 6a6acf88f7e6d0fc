import logging
from typing import List, Optional

from farmhand.core.errors import DocumentNotFoundError
from farmhand.models.job import Job, JobApplicant

logger = logging.getLogger(__name__)


class JobService:
    """Farmers post jobs, contractors apply, farmers pick one applicant."""

    async def _get_job(self, job_id) -> Job:
        job = await Job.get(job_id)
        if job is None:
            raise DocumentNotFoundError("jobs", str(job_id))
        return job

    async def create_job(self, farmer_id: str, farmer_name: str, title: str, description: str = "",
                         location: Optional[str] = None, pay: Optional[float] = None,
                         currency: str = "USD") -> Job:
        job = Job(
            farmer_id=farmer_id,
            farmer_name=farmer_name,
            title=title,
            description=description,
            location=location,
            pay=pay,
            currency=currency,
        )
        await job.insert()
        logger.info("Created job %s for farmer %s", job.id, farmer_id)
        return job

    async def get_my_jobs(self, farmer_id: str) -> List[Job]:
        return await Job.find(Job.farmer_id == farmer_id).sort(-Job.created_at).to_list()

    async def get_open_jobs(self) -> List[Job]:
        return await Job.find(Job.status == "open").sort(-Job.created_at).to_list()

    async def apply_for_job(self, job_id, contractor_id: str, contractor_name: str, message: str = "") -> Job:
        job = await self._get_job(job_id)
        job.applicants.append(JobApplicant(
            contractor_id=contractor_id,
            contractor_name=contractor_name,
            message=message,
        ))
        await job.save()
        return job

    async def accept_applicant(self, job_id, contractor_id: str) -> Job:
        job = await self._get_job(job_id)
        job.status = "filled"
        job.accepted_contractor_id = contractor_id
        await job.save()
        return job

    async def close_job(self, job_id) -> Job:
        job = await self._get_job(job_id)
        job.status = "completed"
        await job.save()
        return job


def get_job_service():
    return JobService()
