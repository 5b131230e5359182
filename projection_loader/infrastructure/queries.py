from dataclasses import dataclass


# SQL Server scripts. Bind parameters use the SQLAlchemy `:name` style.

LIST_PRODUCERS_WITH_RECEPTION = """
SELECT DISTINCT
    prod.CardCodeSAP + '-' + CAST(huerto.idSAP AS varchar(10)) AS ProducerOrchard,
    CASE
        WHEN pres.Organico = 'Y' THEN UPPER(cul.[Desc] + ' ORG')
        ELSE UPPER(cul.[Desc])
    END AS Fruit
FROM Trazabilidad.dbo.Recepcion rec
INNER JOIN Trazabilidad.dbo.Productores prod ON prod.id = rec.idProductor
INNER JOIN Trazabilidad.dbo.Huerto huerto ON prod.id = huerto.idProductor
INNER JOIN Trazabilidad.dbo.Presentacion pres ON pres.id = rec.idPresentacion
INNER JOIN Trazabilidad.dbo.Cultivo cul ON cul.id = pres.idCultivo
WHERE YEAR(rec.FechaRecepcion) = YEAR(GETDATE())
"""

EXIST_PROJECTION = """
SELECT id
FROM IA_Projection.dbo.Projection
WHERE date_projection = :date_projection
  AND pr_producer = :pr_producer
  AND id_orchard = :id_orchard
  AND id_fruit = (SELECT id FROM IA_Projection.dbo.Fruits WHERE fuit_name = :fruit_name)
"""

INSERT_PROJECTION = """
INSERT INTO Projection (date_projection, pr_producer, id_fruit, id_orchard)
OUTPUT Inserted.ID
VALUES (:date, :prod, (SELECT id FROM IA_Projection.dbo.Fruits WHERE fuit_name = :fruit), :id_orchard)
"""

INSERT_PROJECTION_DETAIL = """
INSERT INTO Projection_Detail (id_projection, future_date, human, ia_model)
OUTPUT Inserted.ID
VALUES (:id_projection, :future_date, :human, :ia_model)
"""


@dataclass(frozen=True)
class SqlScripts:
    """SQL text used by the job; override for another schema or dialect."""

    list_producers: str = LIST_PRODUCERS_WITH_RECEPTION
    exist_projection: str = EXIST_PROJECTION
    insert_projection: str = INSERT_PROJECTION
    insert_projection_detail: str = INSERT_PROJECTION_DETAIL
